"""Format converters.

- kml: KML survey exports -> FeatureCollection
- boq: bill-of-quantities spreadsheet rows -> BoqData
"""
