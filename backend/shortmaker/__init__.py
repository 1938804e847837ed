"""
ShortMaker - idea to narrated short video

Packages:
    - config: environment settings, constants and image backend catalog
    - core: exceptions, logging, timeouts and media handle helpers
    - models: manifest, request and status models
    - services: providers, pipeline stages and infrastructure
"""

__version__ = "0.1.0"
