import logging
import typing
import mido

import euterpe.exceptions

logger = logging.getLogger(__name__)

MIDI_THROUGH = "Midi Through"


def choose_output_name(outputs: typing.Sequence[str], device_name: typing.Optional[str] = None) -> str:
    """
    Pick an output port name from the available ones.

    - An explicit `device_name` must be one of `outputs`.
    - With no name and exactly one port, that port is used.
    - With several ports, the first one that is not a "Midi Through" loopback is used
      (or the first port, if they are all loopbacks).

    Raises:
        RenderError: If there are no ports or the requested one is missing.
    """
    if not outputs:
        raise euterpe.exceptions.RenderError("No MIDI output devices found.")

    # Explicit device requested
    if device_name is not None:
        if device_name in outputs:
            return device_name
        raise euterpe.exceptions.RenderError(
            f"MIDI output device '{device_name}' not found. "
            f"Available devices: {list(outputs)}"
        )

    # Auto-discover: one device - use it
    if len(outputs) == 1:
        logger.info(f"One MIDI output found - using '{outputs[0]}'")
        return outputs[0]

    # Auto-discover: skip the loopback port most systems expose first
    for name in outputs:
        if MIDI_THROUGH not in name:
            logger.info(f"Several MIDI outputs found - using '{name}'")
            return name

    return outputs[0]


def select_output_device(device_name: typing.Optional[str] = None) -> typing.Tuple[str, typing.Any]:
    """
    Select and open a MIDI output device.

    Returns:
        A tuple of (device_name, midi_out_object).

    Raises:
        RenderError: If no suitable device exists or it cannot be opened.
    """
    try:
        outputs = mido.get_output_names()
    except Exception as e:
        raise euterpe.exceptions.RenderError(f"Failed to list MIDI outputs: {e}") from e

    logger.info(f"Available MIDI outputs: {outputs}")

    selected_name = choose_output_name(outputs, device_name)

    try:
        midi_out = mido.open_output(selected_name)
    except Exception as e:
        raise euterpe.exceptions.RenderError(f"Failed to open MIDI output '{selected_name}': {e}") from e

    logger.info(f"Opened MIDI output: {selected_name}")

    return selected_name, midi_out
