from .repository_client import MavenRepositoryClient

__all__ = ["MavenRepositoryClient"]
