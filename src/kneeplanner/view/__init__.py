"""
The VIEW layer turns planning entities into PyVista geometry and wires
surface picking and angle sliders back into the session.
"""
