"""automessage: commit messages, tag notes and changelogs drafted from git history."""

__version__ = "0.3.0"
