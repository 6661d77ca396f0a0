from .csv_matrix import load_csv_matrix, parse_rows, read_csv_rows
