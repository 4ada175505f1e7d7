"""Database plumbing: engine factory, dialects, shared types and metadata."""
