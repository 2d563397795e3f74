"""
TaskLane - multi-tenant task lists with an access-control engine

Namespaces contain lists, lists contain tasks. Access is resolved by
tasklane.permissions from ownership, direct user shares, team shares and
namespace-inherited team shares, with archived entities read-only.
"""

__version__ = "1.0.0"
