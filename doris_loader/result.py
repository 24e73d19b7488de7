from pydantic import BaseModel, ConfigDict, Field

from doris_loader.constants import SUCCESS_STATUS


class LoadResult(BaseModel):
    """Result document returned by the stream load API for one attempt.

    Success is decided by ``Status`` alone: the service answers HTTP 200 for
    failed loads as well.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    txn_id: int = Field(default=0, alias="TxnId")
    label: str = Field(default="", alias="Label")
    comment: str = Field(default="", alias="Comment")
    two_phase_commit: str = Field(default="", alias="TwoPhaseCommit")
    status: str = Field(default="", alias="Status")
    message: str = Field(default="", alias="Message")
    number_total_rows: int = Field(default=0, alias="NumberTotalRows")
    number_loaded_rows: int = Field(default=0, alias="NumberLoadedRows")
    number_filtered_rows: int = Field(default=0, alias="NumberFilteredRows")
    number_unselected_rows: int = Field(default=0, alias="NumberUnselectedRows")
    load_bytes: int = Field(default=0, alias="LoadBytes")
    load_time_ms: int = Field(default=0, alias="LoadTimeMs")
    begin_txn_time_ms: int = Field(default=0, alias="BeginTxnTimeMs")
    stream_load_put_time_ms: int = Field(default=0, alias="StreamLoadPutTimeMs")
    read_data_time_ms: int = Field(default=0, alias="ReadDataTimeMs")
    write_data_time_ms: int = Field(default=0, alias="WriteDataTimeMs")
    commit_and_publish_time_ms: int = Field(
        default=0, alias="CommitAndPublishTimeMs"
    )
    error_url: str = Field(default="", alias="ErrorURL")

    @property
    def is_success(self) -> bool:
        return self.status == SUCCESS_STATUS

    def describe_failure(self) -> str:
        return f"error_url={self.error_url} message={self.message}"
