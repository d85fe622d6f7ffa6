from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional


class ActorStorage(ABC):
    """
    The run platform: where the input comes from and where results go.
    """

    @abstractmethod
    def get_input(self) -> Optional[Dict[str, Any]]:
        """
        Return the run input, or None when none was provided.
        """
        pass

    @abstractmethod
    def push_data(self, rows: List[Dict[str, Any]]) -> None:
        """
        Append rows to the run dataset.

        :param rows: Flat records in dataset column order.
        """
        pass

    @abstractmethod
    def set_value(self, key: str, value: Any) -> None:
        """
        Store a JSON-serializable value under a key of the key-value store.

        :param key: The record key, e.g. `RUN-SUMMARY`.
        :param value: The value to store.
        """
        pass

    @abstractmethod
    def get_value(self, key: str) -> Any:
        """
        Read a value back from the key-value store, or None when missing.
        """
        pass

    @abstractmethod
    def purge(self) -> None:
        """
        Drop the previous run's dataset and every key-value record except `INPUT`.
        """
        pass
