from abc import ABC, abstractmethod


class Classifier(ABC):
    @abstractmethod
    def complete(self, prompt: str) -> str:
        """Send the prompt and return the raw response text.

        Raises ServiceError when the upstream call fails or returns nothing.
        """
        pass
