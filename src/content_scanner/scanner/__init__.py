"""External scan command invocation."""
