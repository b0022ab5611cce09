class GitMasterError(Exception):
    """Raised when a repository action is rejected. The message is what the user sees."""


class ScenarioError(GitMasterError):
    pass
