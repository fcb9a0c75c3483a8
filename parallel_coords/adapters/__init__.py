from parallel_coords.adapters.normalize import records_from_array, records_from_frame, records_from_rows, schema_from_dict

__all__ = ["records_from_array", "records_from_frame", "records_from_rows", "schema_from_dict"]
