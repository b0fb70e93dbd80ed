"""Student command-line tool."""
