"""
Functional core of the flowlens engine.

NO IMPORTS FROM:
- rich (console, table, prompt)
- typer

Every function here is a pure transformation of its inputs. Nothing reads the
clock, the filesystem or global state; `now` and friends are always passed in.
"""
