import logging

import euterpe.config
import euterpe.constants.durations as dur
import euterpe.exceptions
import euterpe.music
import euterpe.performer
import euterpe.phrase
import euterpe.player
import euterpe.renderer


# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def demo_music () -> euterpe.music.Music:

	"""
	A short two-voice phrase: a rising melody over a held bass, swelling and slowing at the end.
	"""

	melody = euterpe.music.line_with_duration(["C4", "D4", "E4", "F4", "G4", "A4", "B4", "C5"], dur.EIGHTH)
	bass = euterpe.music.note("C3", dur.HALF) + euterpe.music.note("G2", dur.HALF)

	opening = (melody | bass).with_phrase(euterpe.phrase.Crescendo("1/2"))

	cadence = euterpe.music.chord([
		euterpe.music.note("E4", dur.WHOLE),
		euterpe.music.note("G4", dur.WHOLE),
		euterpe.music.note("C5", dur.WHOLE),
		euterpe.music.note("C3", dur.WHOLE),
	]).with_phrase(euterpe.phrase.ArpeggioUp(), euterpe.phrase.Ritardando("1/2"))

	return (opening + cadence).with_player("fancy").with_instrument("acoustic_grand_piano")


def main () -> None:

	"""
	Main entry point for the euterpe demo.
	"""

	logger.info("Euterpe starting...")

	config = euterpe.config.load_config()

	performance = euterpe.performer.perform(
		demo_music(),
		context = config.context(),
		players = euterpe.player.default_registry(config)
	)

	logger.info(f"{len(performance)} events, {performance.duration} whole notes")

	try:
		state = euterpe.renderer.play(performance, device_name=config.output_device, bpm=config.bpm)
	except euterpe.exceptions.RenderError as exc:
		logger.error(f"Playback failed: {exc}")
		return

	logger.info(f"Finished: {state.value}")


if __name__ == "__main__":
	main()
