"""
Pydantic model for application configuration.
Provides robust validation for all settings.
"""

from pathvalidate import ValidationError as FileNameError
from pathvalidate import validate_filename
from pydantic import BaseModel, Field, field_validator, model_validator

MIN_BUFFER_SIZE = 512
MAX_BUFFER_SIZE = 16 * 1024 * 1024


class SegmergeConfig(BaseModel):
    """A validated configuration model for the application."""

    # Assembly Settings
    buffer_size: int = 8192
    default_part_count: int = 3
    atomic_merge: bool = False

    # Environment-derived storage roots
    external_storage_env: str = "EXTERNAL_STORAGE"
    secondary_storage_env: str = "SECONDARY_STORAGE"
    emulated_storage_env: str = "EMULATED_STORAGE_TARGET"
    default_external_path: str = "/sdcard"
    fallback_external_path: str = "/storage/sdcard0"

    # System files read by the mount-table tier
    mount_table_path: str = "/proc/mounts"
    vold_config_paths: list[str] = Field(
        default_factory=lambda: ["/system/etc/vold.fstab", "/system/etc/vold.conf"]
    )
    block_device_prefixes: list[str] = Field(
        default_factory=lambda: ["/dev/block/vold/", "/dev/block//vold/"]
    )

    # Volume manager and writability probe
    volume_paths: list[str] = Field(default_factory=list)
    probe_file_name: str = "tw.txt"
    trust_writable_flag: bool = False

    # Internal fields not loaded from INI file
    config_path: str = Field("", repr=False)

    class Config:
        """Pydantic model configuration."""

        validate_assignment = True
        str_strip_whitespace = True

    @field_validator("buffer_size")
    @classmethod
    def validate_buffer_size(cls, v: int) -> int:
        """Keeps the intermediate buffer within sane bounds."""
        if v < MIN_BUFFER_SIZE or v > MAX_BUFFER_SIZE:
            raise ValueError(
                f"Buffer size must be between {MIN_BUFFER_SIZE} and {MAX_BUFFER_SIZE}."
            )
        return v

    @field_validator("default_part_count")
    @classmethod
    def validate_part_count(cls, v: int) -> int:
        if v < 1:
            raise ValueError("Default part count must be at least 1.")
        return v

    @field_validator("probe_file_name")
    @classmethod
    def validate_probe_file_name(cls, v: str) -> str:
        """The marker must be a bare file name inside the probed directory."""
        if v in (".", ".."):
            raise ValueError("Probe file name must be a plain file name.")
        try:
            validate_filename(v, platform="universal")
        except FileNameError as e:
            raise ValueError(f"Probe file name must be a plain file name: {e}") from e
        return v

    @model_validator(mode="after")
    def validate_storage_paths(self) -> "SegmergeConfig":
        """Checks that the conventional storage roots are absolute."""
        for name in ("default_external_path", "fallback_external_path"):
            value = getattr(self, name)
            if not value.startswith("/"):
                raise ValueError(f"'{name}' must be an absolute path, got: {value}")
        if not self.block_device_prefixes:
            raise ValueError("At least one block device prefix is required.")
        return self

    @classmethod
    def get_ini_keys(cls) -> set[str]:
        """Returns a set of all keys that are expected in the INI file."""
        internal_fields = {"config_path"}
        return {key for key in cls.model_fields if key not in internal_fields}
