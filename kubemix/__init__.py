"""kubemix: pack a live Kubernetes cluster into a single LLM-friendly document."""

__version__ = "0.1.0"
