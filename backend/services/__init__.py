"""
Services - calibration search engine

- search_service: CalibrationSearchService (find_by_id, search)
- age_filter, taxon_resolver, clade_resolver, ancestor_resolver: ID resolvers
- calibration_assembler: ID -> Calibration hydration
- errors: CalibrationServiceError hierarchy
"""
