"""Settings loaded from a YAML file.

Every key is optional::

    midi:
      device_name: "FluidSynth virtual port"
    renderer:
      bpm: 96
    players:
      staccato_fraction: 1/3
      legato_overlap: 5/4
    context:
      volume: 110
"""

import dataclasses
import fractions
import logging
import os
import typing

import yaml

import euterpe.constants.velocity
import euterpe.context
import euterpe.exceptions
import euterpe.phrase


logger = logging.getLogger(__name__)

DEFAULT_BPM = 120.0


@dataclasses.dataclass
class Config:

	"""
	Runtime settings.

	Attributes:
		bpm: Quarter notes per minute used to map whole notes to seconds
		output_device: MIDI output port name (``None`` selects one automatically)
		staccato_fraction: Sounding fraction used by the ``"staccato"`` player
		legato_overlap: Stretch factor used by the ``"legato"`` player
		default_volume: Volume of the root interpretation context
	"""

	bpm: float = DEFAULT_BPM
	output_device: typing.Optional[str] = None
	staccato_fraction: fractions.Fraction = fractions.Fraction(1, 2)
	legato_overlap: fractions.Fraction = fractions.Fraction(5, 4)
	default_volume: int = euterpe.constants.velocity.DEFAULT_CONTEXT_VOLUME

	def __post_init__ (self) -> None:

		if isinstance(self.bpm, bool) or not isinstance(self.bpm, (int, float)) or self.bpm <= 0:
			raise euterpe.exceptions.ValidationError(f"bpm must be a positive number, got {self.bpm!r}")

		if self.output_device is not None and not isinstance(self.output_device, str):
			raise euterpe.exceptions.ValidationError(f"device_name must be a string, got {self.output_device!r}")

		self.staccato_fraction = euterpe.phrase.to_fraction(self.staccato_fraction, "staccato_fraction")
		self.legato_overlap = euterpe.phrase.to_fraction(self.legato_overlap, "legato_overlap")

		if isinstance(self.default_volume, bool) or not isinstance(self.default_volume, int) or not 0 <= self.default_volume <= 127:
			raise euterpe.exceptions.ValidationError(f"volume must be an integer 0-127, got {self.default_volume!r}")


	def context (self) -> euterpe.context.Context:

		"""
		The root interpretation context for these settings.
		"""

		return euterpe.context.Context(volume=self.default_volume)


def _section (data: typing.Dict[str, typing.Any], name: str) -> typing.Dict[str, typing.Any]:

	section = data.get(name) or {}

	if not isinstance(section, dict):
		raise euterpe.exceptions.ValidationError(f"Config section '{name}' must be a mapping")

	return section


def parse_config (data: typing.Optional[typing.Dict[str, typing.Any]]) -> Config:

	"""
	Build a Config from the mapping produced by the YAML loader.
	"""

	if data is None:
		return Config()

	if not isinstance(data, dict):
		raise euterpe.exceptions.ValidationError("Config must be a mapping")

	defaults = Config()
	players = _section(data, "players")

	return Config(
		bpm = _section(data, "renderer").get("bpm", defaults.bpm),
		output_device = _section(data, "midi").get("device_name", defaults.output_device),
		staccato_fraction = players.get("staccato_fraction", defaults.staccato_fraction),
		legato_overlap = players.get("legato_overlap", defaults.legato_overlap),
		default_volume = _section(data, "context").get("volume", defaults.default_volume),
	)


def load_config (config_path: str = 'config.yaml') -> Config:

	"""
	Load configuration from a YAML file.
	"""

	if not os.path.exists(config_path):
		logger.warning(f"Config file {config_path} not found. Using defaults.")
		return Config()

	with open(config_path, 'r') as f:
		data = yaml.safe_load(f)

	logger.info(f"Loaded config from {config_path}")

	return parse_config(data)
