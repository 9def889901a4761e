from abc import ABC, abstractmethod


class IQrCodeGenerator(ABC):
    @abstractmethod
    def png(self, data: str) -> bytes:
        pass
