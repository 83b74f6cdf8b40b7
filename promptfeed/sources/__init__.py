"""Source adapters: each one turns a SourceDescriptor into raw document text."""
