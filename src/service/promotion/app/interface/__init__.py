from src.service.promotion.app.interface.i_fare_query_repo import IFareQueryRepo

__all__ = ['IFareQueryRepo']
