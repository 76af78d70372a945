"""mdtodo: one task per Markdown file, with a YAML header block."""

__version__ = "0.1.0"
