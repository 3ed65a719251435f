"""Command-line interface for rabbithole."""
