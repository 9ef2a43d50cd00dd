import pandas as pd
import numpy as np
from typing import Iterable
from utmptail.models.record import AccountingRecord


class AccountingExporter:
    """
    Flatten decoded accounting records into a pandas DataFrame, one row per record.
    """

    ALL_COLUMNS = [
        'type',  # Raw ut_type code
        'kind',  # RecordType name (UNKNOWN for unrecognized codes)
        'pid',
        'device',  # ut_line
        'id',  # ut_id
        'user',
        'host',
        'termination',  # ut_exit.e_termination
        'exit',  # ut_exit.e_exit
        'session',
        'time',  # Formatted timestamp
        'time_ns',  # Nanoseconds since the epoch
        'addr',
        'offset',  # Position of the record in the file
    ]

    # Column order of the streaming CSV rendering
    CSV_LINE_COLUMNS = ['type', 'pid', 'device', 'user', 'id', 'host', 'time']

    @staticmethod
    def record_to_row(record: AccountingRecord,
                      time_layout: str = "%Y-%m-%d %H:%M:%S",
                      utc: bool = False) -> dict:
        """Flatten one record into a dict keyed by ALL_COLUMNS."""
        return {
            'type': record.type_code,
            'kind': record.kind.name,
            'pid': record.pid,
            'device': record.device,
            'id': record.line_id,
            'user': record.user,
            'host': record.host,
            'termination': record.exit_status.termination,
            'exit': record.exit_status.exit,
            'session': record.session,
            'time': record.local_time(utc).strftime(time_layout),
            'time_ns': record.timestamp.value,
            'addr': str(record.address),
            'offset': record.offset,
        }

    @staticmethod
    def records_to_dataframe(records: Iterable[AccountingRecord],
                             time_layout: str = "%Y-%m-%d %H:%M:%S",
                             utc: bool = False) -> pd.DataFrame:
        columns = AccountingExporter.ALL_COLUMNS
        data_cols = {col: [] for col in columns}

        for record in records:
            row = AccountingExporter.record_to_row(record, time_layout, utc)
            for col in columns:
                data_cols[col].append(row[col])

        df = pd.DataFrame(data_cols, columns=columns)
        return AccountingExporter._downcast_dtypes(df)

    @staticmethod
    def _downcast_dtypes(df: pd.DataFrame) -> pd.DataFrame:
        if df is None or df.empty:
            return df

        int16_cols = ['type', 'termination', 'exit']
        for col in int16_cols:
            df[col] = df[col].astype(np.int16)

        int32_cols = ['pid', 'session']
        for col in int32_cols:
            df[col] = df[col].astype(np.int32)

        df['time_ns'] = df['time_ns'].astype(np.int64)
        # Records decoded from bare blocks have no offset
        df['offset'] = pd.to_numeric(df['offset'], errors='coerce').astype('Int64')
        df['kind'] = df['kind'].astype('category')
        return df

    @staticmethod
    def export_to_csv(df: pd.DataFrame, output_path: str, na_rep: str = '') -> None:
        df.to_csv(output_path, index=False, na_rep=na_rep)
