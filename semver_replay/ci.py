import os
from collections.abc import Mapping

CI_VARIABLES = ("CI", "GITHUB_ACTIONS", "GITLAB_CI", "BUILDKITE", "TF_BUILD")


def _truthy(value: str | None) -> bool:
    return bool(value) and value.strip().lower() not in {"0", "false", "no", "off"}


def in_ci(env: Mapping[str, str] | None = None) -> bool:
    env = os.environ if env is None else env
    return any(_truthy(env.get(name)) for name in CI_VARIABLES)


def write_github_output(values: Mapping[str, str], env: Mapping[str, str] | None = None) -> bool:
    """Append ``key=value`` lines to the file named by GITHUB_OUTPUT, if any."""
    env = os.environ if env is None else env
    path = env.get("GITHUB_OUTPUT")
    if not path:
        return False
    with open(path, "a", encoding="utf-8") as f:
        for key, value in values.items():
            f.write(f"{key}={value}\n")
    return True
