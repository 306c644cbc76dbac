# spend_tracker/outputs/base.py
from abc import ABC, abstractmethod

class BaseOutput(ABC):
    @abstractmethod
    def write(self, dataset, store):
        """Write the dataset's effective transactions to the chosen sink."""
        pass
