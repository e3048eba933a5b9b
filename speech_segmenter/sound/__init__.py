"""Sound subsystem - energy metering only; AudioSource imports sounddevice and is loaded on demand."""
from speech_segmenter.sound.EnergyMeter import EnergyMeter

__all__ = ['EnergyMeter']
