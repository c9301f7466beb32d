"""FastAPI application exposing a scanning session."""
from fastapi import Depends, FastAPI, File, HTTPException, Request, UploadFile
from fastapi.responses import PlainTextResponse

from rscan import __version__
from rscan.errors import (
    AlignmentError,
    ConfigurationError,
    FormulaError,
    ScanError,
    SessionError,
)
from rscan.export import rows_to_csv
from rscan.render import list_color_schemes, load_color_scheme
from rscan.schemas import (
    ColorRangesUpdate,
    ColorScheme,
    GroupsUpdate,
    LayoutUpdate,
    Page,
    ParamsUpdate,
    ScanSummary,
    ScoringParameters,
    SequenceEntry,
)
from rscan.sequences import Alignment
from rscan.session import Session

app = FastAPI(title="rscan", version=__version__)
app.state.session = Session()


def get_session(request: Request) -> Session:
    return request.app.state.session


def _loaded(session: Session) -> Alignment:
    if session.alignment is None:
        raise HTTPException(status_code=409, detail="No alignment loaded")
    return session.alignment


# --- Alignment endpoints ---

@app.post("/api/session/fasta")
async def upload_fasta(
    file: UploadFile = File(...), session: Session = Depends(get_session)
) -> list[SequenceEntry]:
    """Load an uploaded aligned FASTA file into the session."""
    content = await file.read()
    try:
        alignment = session.load_text(content.decode("utf-8"))
    except UnicodeDecodeError as e:
        raise HTTPException(status_code=400, detail=f"File is not UTF-8 text: {e}")
    except AlignmentError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return alignment.entries()


@app.post("/api/session/text")
async def load_text(data: dict, session: Session = Depends(get_session)) -> list[SequenceEntry]:
    """Load pasted FASTA text into the session."""
    try:
        alignment = session.load_text(data.get("text", ""))
    except AlignmentError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return alignment.entries()


@app.get("/api/session/labels")
async def labels(session: Session = Depends(get_session)) -> list[SequenceEntry]:
    return _loaded(session).entries()


# --- Group endpoints ---

@app.get("/api/session/groups")
async def get_groups(session: Session = Depends(get_session)) -> list[list[int]]:
    _loaded(session)
    return session.groups


@app.put("/api/session/groups")
async def put_groups(update: GroupsUpdate, session: Session = Depends(get_session)) -> list[list[int]]:
    """Replace the group partition; an empty list means one group per sequence."""
    _loaded(session)
    try:
        return session.set_groups(update.groups)
    except ConfigurationError as e:
        raise HTTPException(status_code=400, detail=str(e))


# --- Parameter endpoints ---

@app.get("/api/session/params")
async def get_params(session: Session = Depends(get_session)) -> ScoringParameters:
    return session.params


@app.put("/api/session/params")
async def put_params(update: ParamsUpdate, session: Session = Depends(get_session)) -> ScoringParameters:
    try:
        session.update_params(**update.model_dump(exclude_none=True))
    except (ConfigurationError, FormulaError) as e:
        raise HTTPException(status_code=400, detail=str(e))
    return session.params


@app.post("/api/session/consensus/{preset}")
async def consensus_preset(preset: str, session: Session = Depends(get_session)) -> ScoringParameters:
    try:
        session.consensus(preset)
    except ConfigurationError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return session.params


@app.post("/api/session/aspecificity/{preset}")
async def aspecificity_preset(preset: str, session: Session = Depends(get_session)) -> ScoringParameters:
    try:
        session.aspecificity(preset)
    except ConfigurationError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return session.params


@app.put("/api/session/color-ranges")
async def put_color_ranges(update: ColorRangesUpdate, session: Session = Depends(get_session)) -> ScoringParameters:
    try:
        session.set_color_ranges(update.ranges)
    except ConfigurationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return session.params


@app.put("/api/session/layout")
async def put_layout(update: LayoutUpdate, session: Session = Depends(get_session)) -> ScoringParameters:
    try:
        session.set_layout(update.window_length, update.label_width)
    except ConfigurationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return session.params


# --- Scan endpoints ---

@app.post("/api/session/scan")
async def run_scan(session: Session = Depends(get_session)) -> ScanSummary:
    """Score the alignment with the current groups and parameters."""
    _loaded(session)
    try:
        session.scan()
    except ScanError as e:
        raise HTTPException(
            status_code=422,
            detail={"message": str(e), "position": e.position, "sequence": e.seq_index},
        )
    except SessionError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except ConfigurationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return session.summary()


@app.get("/api/session/pages")
async def get_pages(session: Session = Depends(get_session)) -> list[Page]:
    try:
        return session.pages()
    except SessionError as e:
        raise HTTPException(status_code=409, detail=str(e))


@app.get("/api/session/scores.csv", response_class=PlainTextResponse)
async def get_scores_csv(session: Session = Depends(get_session)):
    try:
        rows = session.rows()
    except SessionError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return PlainTextResponse(rows_to_csv(rows), media_type="text/csv")


# --- Color scheme endpoints ---

@app.get("/api/color-schemes")
async def color_schemes() -> list[str]:
    """List available color schemes."""
    return list_color_schemes()


@app.get("/api/color-schemes/{name}")
async def get_color_scheme(name: str) -> ColorScheme:
    """Get a color scheme by name."""
    try:
        return load_color_scheme(name)
    except ConfigurationError as e:
        raise HTTPException(status_code=404, detail=str(e))


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
