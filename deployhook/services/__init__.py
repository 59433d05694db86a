"""
Deploy services.

Organized by step of the webhook pipeline:
- decoder: JSON / form-encoded body normalization
- resolver: repository name -> deploy target
- commands: external command execution (git, docker compose)
- deployer: pull / migrate / restart / health check / rollback sequence
"""

from deployhook.services import commands, decoder, deployer, resolver

__all__ = ["commands", "decoder", "deployer", "resolver"]
