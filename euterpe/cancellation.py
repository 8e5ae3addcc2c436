import asyncio
import logging
import threading
import typing


logger = logging.getLogger(__name__)


class CancellationToken:

	"""
	A set-once stop request shared between a renderer and whoever may stop it.

	``cancel()`` may be called from any thread or from a signal handler.  Coroutines
	blocked in ``await token.wait(timeout)`` wake up immediately, which is how the
	renderer sleeps between events without missing a stop request.

	Example:
		```python
		token = euterpe.cancellation.CancellationToken()
		threading.Timer(5, token.cancel).start()
		await renderer.render(performance, sink, token)
		```
	"""

	def __init__ (self) -> None:

		self._event = threading.Event()
		# Reentrant: a signal handler may call cancel() while this thread holds the lock in wait().
		self._lock = threading.RLock()
		self._waiters: typing.List[typing.Tuple[asyncio.AbstractEventLoop, asyncio.Future]] = []


	@property
	def cancelled (self) -> bool:
		return self._event.is_set()


	def cancel (self) -> None:

		"""
		Request cancellation.  Calling it again has no further effect.
		"""

		with self._lock:

			if self._event.is_set():
				return

			self._event.set()
			waiters = self._waiters
			self._waiters = []

		logger.info("Cancellation requested")

		for loop, future in waiters:
			if not loop.is_closed():
				loop.call_soon_threadsafe(_wake, future)


	async def wait (self, timeout: typing.Optional[float] = None) -> bool:

		"""Wait until cancelled or until ``timeout`` seconds have passed.

		Returns:
			True when the token has been cancelled.
		"""

		if self._event.is_set():
			return True

		loop = asyncio.get_running_loop()
		future = loop.create_future()
		entry = (loop, future)

		with self._lock:
			self._waiters.append(entry)

		try:
			# cancel() sets the flag before taking the waiters, so a waiter it missed sees the flag here.
			if not self._event.is_set():
				await asyncio.wait({future}, timeout=timeout)

		finally:
			with self._lock:
				if entry in self._waiters:
					self._waiters.remove(entry)

			if not future.done():
				future.cancel()

		return self._event.is_set()


def _wake (future: asyncio.Future) -> None:

	if not future.done():
		future.set_result(None)
