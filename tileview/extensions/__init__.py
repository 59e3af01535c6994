"""Optional client extensions that contribute layers to the renderer."""
