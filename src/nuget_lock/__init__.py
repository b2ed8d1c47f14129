"""Lock file updater for .NET projects restored with NuGet."""

__version__ = "0.1.0"
