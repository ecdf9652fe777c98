from models.division import Division
from models.excel_upload import ExcelUpload
from models.faculty import Faculty
from models.subject import Subject
from models.timetable_slot import TimetableSlot
from models.workload_assignment import WorkloadAssignment

__all__ = [
	"Division",
	"ExcelUpload",
	"Faculty",
	"Subject",
	"TimetableSlot",
	"WorkloadAssignment",
]
