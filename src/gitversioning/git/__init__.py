"""Git repository access for gitversioning."""

from gitversioning.git.overrides import RefOverride, detect_override
from gitversioning.git.utils import GitError, GitRepoContext

__all__ = ["GitError", "GitRepoContext", "RefOverride", "detect_override"]
