"""
The APP layer owns the running session: state, orchestration and signals.
"""
