"""
Base IO class for the solid output files.

Handles the output directory and the naming of the numbered result files
shared by the writers and readers of this package.
"""

import os
from abc import ABC


class IOBase(ABC):
    """
    Base class for input/output operations on numbered result files.
    """

    def __init__(self, outputDir: str, prefix: str = "solide", extension: str = "vtk"):
        """
        Args:
            outputDir: Directory holding the numbered files
            prefix: Prefix of the file names
            extension: File extension (without dot)
        """
        self.outputDir = outputDir
        self.prefix = prefix
        self.extension = extension

    def createOutputDir(self) -> str:
        os.makedirs(self.outputDir, exist_ok=True)
        return self.outputDir

    def getFileName(self, index: int) -> str:
        """File name of output number index, e.g. solide12.vtk"""
        return f"{self.prefix}{index}.{self.extension}"

    def getFullPath(self, index: int) -> str:
        return os.path.join(self.outputDir, self.getFileName(index))
