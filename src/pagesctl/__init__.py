"""pagesctl: publish a built web application to a static-hosting git branch."""

__version__ = "0.1.0"
