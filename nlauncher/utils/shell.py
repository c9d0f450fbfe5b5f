"""Shell execution utilities."""

import re
import subprocess
from typing import List, Optional, Tuple

# Desktop Entry field codes (%f, %U, %i, ...); %% is a literal percent sign
_FIELD_CODE = re.compile(r'%(.)')


def strip_field_codes(exec_command: str) -> str:
    """
    Remove Desktop Entry field codes from an Exec line.

    Args:
        exec_command: Raw Exec value

    Returns:
        Command line safe to hand to a shell
    """
    def replace(match):
        return "%" if match.group(1) == "%" else ""

    command = _FIELD_CODE.sub(replace, exec_command)
    # Collapse the gaps left by removed codes
    return re.sub(r'\s+', ' ', command).strip()


class ShellExecutor:
    """Centralized subprocess execution with standardized error handling."""

    def execute(
        self,
        args: List[str],
        input_text: Optional[str] = None,
        check: bool = False,
        timeout: Optional[float] = 5.0,
    ) -> Tuple[bool, Optional[str], Optional[str]]:
        """
        Run a command and wait for it.

        Args:
            args: Program and arguments
            input_text: Optional text written to stdin
            check: If True, raise CalledProcessError on non-zero exit code
            timeout: Seconds before the command is abandoned

        Returns:
            Tuple of (success, stdout, stderr)
            - success: True if return code is 0, False otherwise
            - stdout: Standard output (None if empty)
            - stderr: Standard error (None if empty)
        """
        try:
            result = subprocess.run(
                args,
                input=input_text,
                capture_output=True,
                text=True,
                check=check,
                timeout=timeout,
            )

            success = result.returncode == 0
            stdout = result.stdout if result.stdout else None
            stderr = result.stderr.strip() if result.stderr.strip() else None

            return success, stdout, stderr
        except subprocess.CalledProcessError as e:
            return False, e.stdout if e.stdout else None, e.stderr.strip() if e.stderr else None
        except (OSError, subprocess.SubprocessError) as e:
            return False, None, str(e)

    def feed(self, args: List[str], input_text: str, timeout: Optional[float] = 5.0) -> Tuple[bool, Optional[str]]:
        """
        Write text to a command's stdin without capturing its output.

        Needed for tools such as wl-copy that fork a server which would
        otherwise hold the output pipes open.

        Returns:
            Tuple of (success, error message)
        """
        try:
            result = subprocess.run(
                args,
                input=input_text,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
                text=True,
                timeout=timeout,
            )
        except (OSError, subprocess.SubprocessError) as e:
            return False, str(e)
        if result.returncode != 0:
            return False, f"{args[0]} exited with status {result.returncode}"
        return True, None

    def spawn(self, command: str) -> Tuple[bool, Optional[str]]:
        """
        Start a shell command detached from this process.

        Args:
            command: Command line run through `sh -c`

        Returns:
            Tuple of (success, error message)
        """
        try:
            subprocess.Popen(
                ["sh", "-c", command],
                stdin=subprocess.DEVNULL,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
                start_new_session=True,
            )
            return True, None
        except OSError as e:
            return False, str(e)
