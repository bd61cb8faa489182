"""Troq marketplace backend."""
