"""HTTP-facing transports: streamable HTTP and SSE applications."""
