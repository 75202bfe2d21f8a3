"""Relational persistence for transcripts and analyses."""
