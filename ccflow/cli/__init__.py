"""ccflow CLI — Typer application and Rich output."""
