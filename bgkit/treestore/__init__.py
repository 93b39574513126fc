"""Tree of named nodes and attribute values, with a brace-delimited text format."""