"""Row and output models."""
