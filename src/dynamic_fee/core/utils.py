import os
import json
import logging
import pandas as pd
import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt
from typing import Any, Dict, Optional, List, Tuple

logger = logging.getLogger(__name__)


class DataIO:
    """
    Utility class for data input/output operations.
    """

    @staticmethod
    def ensure_directory_exists(directory_path: str) -> None:
        """
        Ensure that a directory exists, creating it if it does not.

        Args:
            directory_path: Path to the directory
        """
        if not os.path.exists(directory_path):
            os.makedirs(directory_path)
            logger.info(f"Created directory: {directory_path}")

    @staticmethod
    def save_dataframe(df: pd.DataFrame, filename: str, directory: str) -> str:
        """
        Save a DataFrame to a CSV file.

        Integer amounts wider than 64 bits are kept in object columns and
        written as plain decimal strings.

        Args:
            df: DataFrame to save
            filename: Filename for the CSV file
            directory: Directory to save to

        Returns:
            Path to the saved file
        """
        DataIO.ensure_directory_exists(directory)
        file_path = os.path.join(directory, filename)
        df.to_csv(file_path, index=False, encoding='utf-8')
        logger.info(f"File saved to: {file_path}")
        return file_path

    @staticmethod
    def load_dataframe(file_path: str,
                       int_columns: Optional[List[str]] = None,
                       parse_dates: Optional[List[str]] = None) -> Optional[pd.DataFrame]:
        """
        Load a DataFrame from a CSV file.

        Args:
            file_path: Path of the CSV file
            int_columns: Columns parsed as arbitrary-precision Python ints
            parse_dates: List of columns to parse as dates

        Returns:
            DataFrame if file exists, None otherwise
        """
        if not os.path.exists(file_path):
            logger.warning(f"File not found: {file_path}")
            return None

        converters = {col: lambda value: int(str(value).strip()) for col in (int_columns or [])}
        df = pd.read_csv(file_path, converters=converters, parse_dates=parse_dates)
        # pandas re-infers int64 when every value fits
        for col in converters:
            df[col] = pd.Series([int(value) for value in df[col]], index=df.index, dtype=object)
        return df


class JSONHandler:
    """
    Utility class for JSON serialization and deserialization.
    """

    class CustomJSONEncoder(json.JSONEncoder):
        """
        Encodes objects exposing to_dict, such as Calibration.
        """
        def default(self, obj: Any) -> Any:
            if hasattr(obj, 'to_dict'):
                return obj.to_dict()
            return super().default(obj)

    @classmethod
    def save_json(cls, data: Dict[str, Any], file_path: str) -> str:
        """
        Save data to a JSON file using a custom encoder.

        Args:
            data: Data to save
            file_path: Destination path

        Returns:
            Path to the saved file
        """
        directory = os.path.dirname(file_path)
        if directory:
            DataIO.ensure_directory_exists(directory)
        with open(file_path, 'w', encoding='utf-8') as f:
            json.dump(data, f, cls=cls.CustomJSONEncoder, indent=2, ensure_ascii=False)
        logger.info(f"JSON file saved to: {file_path}")
        return file_path

    @staticmethod
    def load_json(file_path: str) -> Optional[Dict[str, Any]]:
        """
        Load data from a JSON file.

        Args:
            file_path: Path of the JSON file

        Returns:
            Data if file exists, None otherwise
        """
        if not os.path.exists(file_path):
            logger.warning(f"File not found: {file_path}")
            return None
        with open(file_path, 'r', encoding='utf-8') as f:
            return json.load(f)


class Visualizer:
    """
    Utility class for visualization.
    """

    @staticmethod
    def save_figure(fig: plt.Figure, filename: str, dpi: int, directory: str) -> str:
        """
        Save a Matplotlib figure to a file and close it.

        Args:
            fig: Figure to save
            filename: Filename for the figure
            dpi: DPI for the saved figure
            directory: Directory to save to

        Returns:
            Path to the saved figure
        """
        DataIO.ensure_directory_exists(directory)
        file_path = os.path.join(directory, filename)
        fig.savefig(file_path, dpi=dpi, bbox_inches='tight')
        plt.close(fig)
        logger.info(f"Figure saved to: {file_path}")
        return file_path

    @staticmethod
    def set_plot_style(style: str = 'seaborn-v0_8-darkgrid', figsize: Tuple[int, int] = (12, 8), dpi: int = 300) -> None:
        """
        Set global plot style.

        Args:
            style: Matplotlib style name
            figsize: Figure size (width, height)
            dpi: DPI for figures
        """
        if style in plt.style.available:
            plt.style.use(style)
        else:
            logger.warning(f"Plot style '{style}' not available, using default")
        plt.rcParams['figure.figsize'] = figsize
        plt.rcParams['figure.dpi'] = dpi
