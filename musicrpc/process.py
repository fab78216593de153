import subprocess


def is_running(app: str) -> bool:
    """True if a process whose command line contains MacOS/<app> exists."""
    try:
        proc = subprocess.run(["pgrep", "-f", f"MacOS/{app}"], capture_output=True, text=True)
    except OSError:
        return False
    return proc.returncode == 0 and proc.stdout.strip() != ""
