"""Conventional-commit driven version bumps for Helm charts in a monorepo."""
