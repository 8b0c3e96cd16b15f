"""Settings package for the ground booking service.

`base.py` contains common configuration shared across environments.
`dev.py`, `prod.py` and `test.py` extend base settings with environment
specific overrides.
"""
