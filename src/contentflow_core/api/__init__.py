"""HTTP surfaces of the content workflow server."""
