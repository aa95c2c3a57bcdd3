"""Test package for Math Smash.

The quiz core is exercised headlessly with a fake clock and fixed seeds.
UI tests use pygame's dummy video driver so no real window is opened.  To
run these tests, execute ``pytest`` from the project root.
"""
