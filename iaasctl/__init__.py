"""iaasctl - IaaS provider abstraction and self-heal controller.

Provisions docker hosts on heterogeneous cloud backends through
docker-machine drivers and heals the bootstrap node of a juju-managed
cluster controller.

Key Components:
    - domain: Machines, provider and healer ports, error taxonomy
    - config: Configuration loading and typed schemas
    - infrastructure: Catalogs, registries, command execution, logging
    - providers: docker-machine IaaS provider and juju healers
    - application: Machine service and heal controller
    - cli: Command line entry point
"""

from ._version import __version__

PACKAGE_NAME = "iaasctl"

__all__ = ["PACKAGE_NAME", "__version__"]
