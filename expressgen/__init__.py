"""expressgen -- scaffolds Express.js backend services from a handful of choices."""

__version__ = "0.1.0"
