"""logfan CLI subcommands."""
