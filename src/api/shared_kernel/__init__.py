"""Components shared by the API's bounded contexts.

Bearer token validation and the observation context bound to probes.
Nothing here may import from a context or from infrastructure.
"""
