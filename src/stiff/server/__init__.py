"""Server — the per-request pipeline and its ASGI plumbing."""
