"""
The MODEL layer contains pure data structures and the planning geometry.
It has NO knowledge of the GUI (Qt) or the Visualization (PyVista).
It deals with Landmarks, Axes, Planes and their Rotations.
"""
