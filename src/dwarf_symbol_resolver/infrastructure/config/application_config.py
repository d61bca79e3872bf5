"""Application configuration for the symbol resolver."""

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

TRUE_VALUES = ("true", "1", "yes", "on")


@dataclass
class Config:
    """Configuration for the symbol resolver."""

    elf_file_path: Path
    verbose: bool = False
    log_dir: Path | None = None
    use_new_arrays: bool = False

    @classmethod
    def from_env(cls, env_path: Path | None = None) -> "Config":
        """
        Load configuration from environment variables or a .env file.

        Args:
            env_path: Optional path to .env file (defaults to .env in current directory)

        Returns:
            Config object
        """
        if env_path is None:
            env_path = Path.cwd() / ".env"

        if env_path.exists():
            load_dotenv(env_path)

        log_dir_str = os.getenv("LOG_DIR", "")

        return cls(
            elf_file_path=Path(os.getenv("ELF_FILE_PATH", "resources/debugdata.elf")),
            verbose=os.getenv("VERBOSE", "false").lower() in TRUE_VALUES,
            log_dir=Path(log_dir_str) if log_dir_str else None,
            use_new_arrays=os.getenv("USE_NEW_ARRAYS", "false").lower() in TRUE_VALUES,
        )

    @classmethod
    def from_args(
        cls,
        elf_file_path: Path | None = None,
        verbose: bool | None = None,
        log_dir: Path | None = None,
        use_new_arrays: bool | None = None,
    ) -> "Config":
        """
        Create configuration from explicit arguments, falling back to environment.

        Args:
            elf_file_path: Path to ELF file (overrides env)
            verbose: Enable verbose output (overrides env)
            log_dir: Directory for log files (overrides env)
            use_new_arrays: Name array elements as [N] instead of _N_ (overrides env)

        Returns:
            Config object
        """
        config = cls.from_env()

        if elf_file_path is not None:
            config.elf_file_path = elf_file_path
        if verbose is not None:
            config.verbose = verbose
        if log_dir is not None:
            config.log_dir = log_dir
        if use_new_arrays is not None:
            config.use_new_arrays = use_new_arrays

        return config

    def validate(self) -> None:
        """
        Validate the configuration.

        Raises:
            ValueError: If configuration is invalid
        """
        if not self.elf_file_path.exists():
            raise ValueError(f"ELF file not found: {self.elf_file_path}")

        if not self.elf_file_path.is_file():
            raise ValueError(f"Not a file: {self.elf_file_path}")

    def ensure_log_dir(self) -> None:
        """Create the log directory if one is configured."""
        if self.log_dir is not None:
            self.log_dir.mkdir(parents=True, exist_ok=True)
