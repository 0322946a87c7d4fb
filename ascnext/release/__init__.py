"""Release decision context.

- version / model: value types and the release record entity
- backend: the App Store Connect collaborator contract
- resolver: build number lookup cascade
- decision: pure next-action state machine
- orchestrator: sequences backend calls into one decision
"""

from __future__ import annotations
