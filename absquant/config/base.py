from dataclasses import asdict, fields
from enum import Enum
from typing import Any

import yaml  # type: ignore[import-untyped]


def _plain(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, dict):
        return {k: _plain(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_plain(v) for v in value]
    return value


class ConfigBase:
    """
    Base class for all configuration dataclasses.

    Not a dataclass itself, so both frozen and mutable configs can derive from it.
    """

    def to_dict(self) -> dict[str, Any]:
        """
        Convert config to dictionary.

        Enum members are stored by value and tuples as lists so the result
        can be written with ``yaml.safe_dump``.

        Returns
        -------
        dict
            Dictionary representation of the config
        """
        return _plain(asdict(self))

    def to_yaml(self, path: str) -> None:
        """
        Save configuration to YAML file.

        Parameters
        ----------
        path : str
            Path to save YAML file
        """
        with open(path, "w") as f:
            yaml.safe_dump(self.to_dict(), f, default_flow_style=False, sort_keys=False)

    @classmethod
    def from_dict(cls, config_dict: dict[str, Any]):
        """
        Create config from dictionary. Unknown keys are ignored.

        Parameters
        ----------
        config_dict : dict
            Dictionary containing configuration values

        Returns
        -------
        ConfigBase
            Configuration instance
        """
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in (config_dict or {}).items() if k in known})

    @classmethod
    def from_yaml(cls, path: str):
        """
        Load configuration from YAML file.

        Parameters
        ----------
        path : str
            Path to YAML file

        Returns
        -------
        ConfigBase
            Configuration instance
        """
        with open(path) as f:
            config_dict = yaml.safe_load(f)
        return cls.from_dict(config_dict)
