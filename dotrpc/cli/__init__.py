"""Command-line interface for dotrpc."""
