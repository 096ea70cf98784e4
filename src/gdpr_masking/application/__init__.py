"""Application layer – masking engine, audit emission and rate limiting."""
