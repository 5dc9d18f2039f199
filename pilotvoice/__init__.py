"""PilotVoice competition survey backend."""
