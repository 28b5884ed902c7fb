"""
Typeahead terminal frontend.

A full-screen prompt_toolkit editor that hosts the suggestion pipeline and
shows completions as inline ghost text.
"""
