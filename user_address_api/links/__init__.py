"""Link feature: the user <-> address association table."""
