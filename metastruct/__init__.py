"""
# Metastruct: metadata out of binary files.

A lot of file formats are made of tagged values: a number identifying the
meaning and a value, usually grouped in sections (the IFDs of a TIFF, the
chunks of a RIFF, the comments of a PostScript file).

The library models them with three layers

 1. streams: random access to the raw bytes, checking every read against
    the available data (a file, a buffer or a stream that cannot seek)
 2. directory/metadata: the raw values decoded by a format reader, grouped
    by section, with the list of the errors found along the way
 3. descriptor: the human readable representation of a value

A format reader has a single entry point

    reader.extract(source, metadata)

and the errors are of two kinds

 1. the data is not there or it's not the expected format: an exception
    is raised and the extraction is aborted
 2. a single value is wrong: the error is recorded in the directory and
    the extraction goes on

A description is always a string or None, never an exception.
"""
